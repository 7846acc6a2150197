import sys

from auto_approve.main import main

sys.exit(main())
