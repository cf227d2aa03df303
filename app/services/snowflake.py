import snowflake.connector

from app.config import settings


# MODULE-LEVEL CONNECTION (USED BY REPOSITORIES)


def get_snowflake_connection():
    """
    Snowflake connection factory.
    Used by repositories via dependency injection.
    """
    password = settings.SNOWFLAKE_PASSWORD.get_secret_value() if settings.SNOWFLAKE_PASSWORD else None

    return snowflake.connector.connect(
        account=settings.SNOWFLAKE_ACCOUNT,
        user=settings.SNOWFLAKE_USER,
        password=password,
        warehouse=settings.SNOWFLAKE_WAREHOUSE,
        database=settings.SNOWFLAKE_DATABASE,
        schema=settings.SNOWFLAKE_SCHEMA,
        role=settings.SNOWFLAKE_ROLE,
    )
