import sys

from tauri_typegen.cli import main


sys.exit(main())
