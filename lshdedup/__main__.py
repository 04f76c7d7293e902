import sys

from lshdedup.cli import main

sys.exit(main())
