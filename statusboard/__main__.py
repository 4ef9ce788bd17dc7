import sys

from .render_entrypoint import main

sys.exit(main())
