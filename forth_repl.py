import sys

from forth_interactive.session import main


if __name__ == '__main__':
    sys.exit(main())
