# Path and File Name : /home/c2rdeploy/rebuild/c2r_detection/__main__.py
# Author: nXxBku0CKFAJCBN3X1g3bQk7OxYQylg8CMw1iGsq7gU
# Details of functionality of this file: Allows running the detection probe with python -m c2r_detection

import sys

from .detect import main

sys.exit(main())
