import sys

from dockdash.cli import main

sys.exit(main())
