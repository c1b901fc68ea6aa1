import sys

from nssp.cli import main

sys.exit(main())
