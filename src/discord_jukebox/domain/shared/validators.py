"""Shared validators for Discord-specific values."""

from discord_jukebox.domain.shared.messages import ErrorMessages


def validate_discord_snowflake(value: int) -> int:
    """Validate a Discord snowflake ID.

    Discord snowflake IDs are 64-bit unsigned integers identifying guilds,
    channels, users and messages.

    Raises:
        ValueError: If the snowflake ID is not positive or does not fit 64 bits.
    """
    if value <= 0:
        raise ValueError(ErrorMessages.INVALID_SNOWFLAKE)
    if value >= 2**64:
        raise ValueError(ErrorMessages.SNOWFLAKE_TOO_LARGE)
    return value


def parse_snowflake(value: int | str) -> int:
    """Turn an opaque string id back into the integer snowflake Discord expects."""
    try:
        snowflake = int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(ErrorMessages.INVALID_SNOWFLAKE) from exc
    return validate_discord_snowflake(snowflake)
