import sys

from sigprof.main_asyncio import main

sys.exit(main())
