import sys

from swiftread.cli import main

sys.exit(main())
