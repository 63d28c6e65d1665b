#!/usr/bin/env python3
from blogsmith.cli import main

if __name__ == "__main__":
    main()
