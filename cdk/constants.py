"""
CDK constants for the serverless items API infrastructure.
"""

# Service configuration
SERVICE_NAME = "ItemsApi"
POWERTOOLS_SERVICE_NAME = "POWERTOOLS_SERVICE_NAME"
POWERTOOLS_METRICS_NAMESPACE = "POWERTOOLS_METRICS_NAMESPACE"
POWERTOOLS_LOG_LEVEL = "LOG_LEVEL"
TABLE_NAME_ENV_VAR = "TABLE_NAME"
ENVIRONMENT_ENV_VAR = "ENVIRONMENT"

# Build paths
SERVICE_BUILD_FOLDER = ".build/service"
LAYER_BUILD_FOLDER = ".build/layer"

# IAM
LAMBDA_BASIC_EXECUTION_ROLE = "AWSLambdaBasicExecutionRole"

# Lambda configuration
LAMBDA_MEMORY_SIZE = 256  # MB
LAMBDA_TIMEOUT = 30  # seconds

# Lambda handlers
ADVANCED_HANDLER = "items_api.handlers.advanced.handler"
BASIC_HANDLER = "items_api.handlers.basic.handler"
CONNECTIVITY_HANDLER = "items_api.handlers.connectivity.handler"

# Secondary index queried by GET /query?gsi=gsi1
QUERY_INDEX_NAME = "gsi1"

# CloudWatch metrics
METRICS_NAMESPACE = "ItemsApi"
