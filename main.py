# main.py

# Convenience launcher so the catalog can be started from a source checkout:
#   python main.py cli list
from doc_catalog.main import main

if __name__ == '__main__':
    main()
