import os
import sys

# Add the project root to sys.path so the maintrack package imports without installation
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from maintrack.app import create_app

app = create_app()
