#!/usr/bin/env python3
from siteforge.cli import main

if __name__ == "__main__":
    main()
