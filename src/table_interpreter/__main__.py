import sys

from table_interpreter.cli import main

sys.exit(main())
