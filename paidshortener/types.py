from typing import Any, TypeAlias

from botocore.client import BaseClient


# Type aliases for Python dictionaries
LambdaEvent: TypeAlias = dict[str, Any]
LambdaContext: TypeAlias = Any
LambdaResponse: TypeAlias = dict[str, Any]
LambdaConfiguration: TypeAlias = dict[str, Any]
AppConfig: TypeAlias = dict[str, Any]
HttpHeaders: TypeAlias = dict[str, str]

# Type aliases for boto3 clients
AppConfigDataClient: TypeAlias = BaseClient
