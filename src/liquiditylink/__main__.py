import sys

from liquiditylink.cli import main

sys.exit(main())
