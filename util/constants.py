# util/constants.py
class InternalURIs:
    API = "/api"
    VALIDATE_TOKEN = API + "/validate-token"
    UPLOAD = API + "/upload"
    GET_TEXT = API + "/get-text"
    SERVE_PDF = API + "/serve-pdf"
    CHECKLISTS = API + "/checklists"
    CHECKLIST = CHECKLISTS + "/{checklist_id}"
    GENERATE_CHECKLIST = CHECKLISTS + "/generate"
    PROCESS = API + "/process"


# Documents are cut to this many characters before they reach a prompt.
MAX_DOCUMENT_CHARS = 10_000

DEFAULT_MAX_CONCURRENCY = 5

TEXT_CACHE_SUFFIX = ".txt"
