import sys

from hint_bot.main import main

sys.exit(main())
