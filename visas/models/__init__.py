# visas/
# ├── models/
# │   ├── visa_application.py       <-- The draft/submitted application (one applicant)
# │   ├── application_document.py   <-- Uploaded files (photo, passport scan, ...)
# │   └── application_snapshot.py   <-- Frozen copy written at submission

from .visa_application import VisaApplication
from .application_document import ApplicationDocument
from .application_snapshot import ApplicationSnapshot
