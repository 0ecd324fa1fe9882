import sys

from scout_gate.cli import main

sys.exit(main())
