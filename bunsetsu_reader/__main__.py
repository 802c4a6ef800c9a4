"""Package entry point for ``python -m bunsetsu_reader``.

WHY: Users run the reader as ``python -m bunsetsu_reader notes.txt`` for
terminal playback, ``python -m bunsetsu_reader --gui`` for the desktop
window, or ``python -m bunsetsu_reader --serve`` for the HTTP API.

HOW: Checks sys.argv for the ``--gui`` and ``--serve`` flags. Otherwise,
delegates to the CLI's main() function.

RULES:
- ``--gui`` launches the tkinter reader
- ``--serve`` starts the FastAPI app under uvicorn
- Without either flag, falls through to the CLI
"""

import sys

if __name__ == "__main__":
    if "--gui" in sys.argv:
        from bunsetsu_reader.gui import main as gui_main
        gui_main()
    elif "--serve" in sys.argv:
        from bunsetsu_reader.server.app import run_api
        run_api()
    else:
        from bunsetsu_reader.cli import main
        main()
