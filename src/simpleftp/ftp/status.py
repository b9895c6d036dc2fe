"""FTP reply code constants (RFC 959 section 4.2)."""

# Service
READY_IN_MINUTES = 120
SERVICE_CLOSING = 221

# Command related
COMMAND_OK = 200
COMMAND_SUPERFLUOUS = 202

# Status messages
SYSTEM_STATUS = 211
DIRECTORY_STATUS = 212
FILE_STATUS = 213
HELP_MESSAGE = 214
NAME_SYSTEM = 215

# Data connection
DATA_CONNECTION_OPEN = 225
CLOSING_DATA_CONNECTION = 226
PASSIVE_MODE = 227

# Login
LOGGED_IN = 230
NEED_PASSWORD = 331
NEED_ACCOUNT = 332

# File actions
FILE_ACTION_OK = 250
PATH_CREATED = 257
FILE_ACTION_PENDING = 350
