import sys

from grantmatch.cli import main

sys.exit(main())
