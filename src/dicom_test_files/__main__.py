import sys

from dicom_test_files.cli import main

sys.exit(main())
