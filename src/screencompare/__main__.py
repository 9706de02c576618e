"""Command-line interface."""
from screencompare.main import main

if __name__ == "__main__":
    main()
