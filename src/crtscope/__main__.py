import sys

from crtscope.cli import main

sys.exit(main())
