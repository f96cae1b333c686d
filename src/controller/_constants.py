# Collector used when neither an explicit endpoint nor
# `CONTROLLER_ENDPOINT` is provided
DEFAULT_ENDPOINT = 'https://api.controller.dev'

DEFAULT_ENVIRONMENT = 'production'

# Seconds to wait on the collector before giving up
DEFAULT_TIMEOUT = 5.0

# Lines of source shown above and below each frame's line
CONTEXT_LINES = 3

SDK_NAME = 'controller/controller-python'
SDK_DIST_NAME = 'controller-sdk'
SDK_FALLBACK_VERSION = '1.0.0'

PLATFORM = 'python'
LEVEL = 'error'
MECHANISM = 'generic'
TRACE_OP = 'http.server'

# Environment variables
ENV_API_KEY = 'CONTROLLER_API_KEY'
ENV_PROJECT_ID = 'CONTROLLER_PROJECT_ID'
ENV_ENDPOINT = 'CONTROLLER_ENDPOINT'
ENV_ENVIRONMENT = 'CONTROLLER_ENVIRONMENT'
ENV_RELEASE = 'CONTROLLER_RELEASE'
# Directory holding the application's own code; frames under it are `in_app`
ENV_APP_ROOT = 'CONTROLLER_APP_ROOT'
ENV_TIMEOUT = 'CONTROLLER_TIMEOUT'
ENV_CA_BUNDLE = 'CONTROLLER_CA_BUNDLE'
