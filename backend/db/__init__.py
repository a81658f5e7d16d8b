# Database utilities package
from .sql import (
    run_sql,
    validate_sql_text,
    validate_params,
    SQLParamStyleError,
    SQLDateParamError,
)
