"""Run the tracker window: python client.py"""
from hp_tracker.client import main

if __name__ == "__main__":
    main()
