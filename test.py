# Top-level interface to run the microrom tests.

import unittest


if __name__ == "__main__":
    unittest.main(module=None, argv=["test.py", "discover", "-s", "tests", "-t", "."])
