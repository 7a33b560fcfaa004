"""Allow running as: python -m reqcheck"""

from .main import main

if __name__ == '__main__':
    main()
