import os
import re

ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))

def test_readme_is_a_user_facing_document():
    with open(os.path.join(ROOT, "pyproject.toml")) as f:
        m = re.search(r'^readme\s*=\s*"([^"]+)"', f.read(), re.MULTILINE)
    assert m is not None
    assert m.group(1) == "README.md"
    assert os.path.isfile(os.path.join(ROOT, m.group(1)))
