import sys

from tracegen.cli import main

sys.exit(main())
