import sys

from rcpu.main import main

sys.exit(main())
