import sys

from hue_exporter.cli import main

sys.exit(main())
