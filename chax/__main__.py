import sys

from chax.cli import main

sys.exit(main())
