"""Run the realtime database server: python server.py"""
from hp_tracker.server import main

if __name__ == '__main__':
    main()
