def create_schema(schema: str) -> str:
    return f"""CREATE SCHEMA IF NOT EXISTS {schema}"""

def create_joined_table(schema: str, table: str) -> str:
    return f"""
    CREATE TABLE IF NOT EXISTS {schema}.{table} (
        location VARCHAR,
        event_time_ms BIGINT,
        hour_ms BIGINT,
        count BIGINT,
        adjusted_count BIGINT,
        was_zero_adjusted BOOLEAN,
        log_count DOUBLE,
        day_of_week INTEGER,
        is_weekend BOOLEAN,
        anomaly_flag VARCHAR,
        temperature_c DOUBLE,
        precipitation_mm DOUBLE
    )
    WITH (
        format = 'PARQUET',
        location = 's3://iceberg/{schema}/{table}'
    )
    """

def truncate_table(schema: str, table: str) -> str:
    return f"""DELETE FROM {schema}.{table}"""
