"""Run the Profile Wizard from project root. Use: python run_app.py"""
import os
import subprocess
import sys

root = os.path.dirname(os.path.abspath(__file__))
app_dir = os.path.join(root, "profile_wizard")
os.chdir(app_dir)
subprocess.run([sys.executable, "-m", "streamlit", "run", "app.py"], check=True)
