# main.py

from shortcut_dock.main import main

if __name__ == '__main__':
    main()
