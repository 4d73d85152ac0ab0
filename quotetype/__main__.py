import sys

from quotetype.app import main

sys.exit(main())
