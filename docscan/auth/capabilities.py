DOCUMENT_SCAN = "document.scan"
DOCUMENT_UPLOAD = "document.upload"
DOCUMENT_ARCHIVE = "document.archive"
DOCUMENT_VIEW = "document.view"

ALL_CAPABILITIES = frozenset({DOCUMENT_SCAN, DOCUMENT_UPLOAD, DOCUMENT_ARCHIVE, DOCUMENT_VIEW})
