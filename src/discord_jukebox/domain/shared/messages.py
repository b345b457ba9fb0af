"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Session state
    NOT_CONNECTED = "I'm not connected to a voice channel!"
    NOTHING_PLAYING = "Nothing is currently playing!"
    NO_HISTORY = "There is no previous track to go back to."
    JOIN_FAILED = "Failed to join voice channel. Please try again."
    USER_NOT_IN_VOICE = "You need to be in a voice channel to use this command!"

    # Validation
    INVALID_LOOP_MODE = "Invalid loop mode '{mode}'. Use none, track or queue."
    VALUE_OUT_OF_RANGE = "{field} must be between {minimum} and {maximum}, got {value}"
    QUEUE_INDEX_NOT_FOUND = "No track at position {position} (queue has {length})."
    INVALID_ENQUEUE_MODE = "Invalid enqueue mode '{mode}'. Use queue, next or now."
    INVALID_SNOWFLAKE = "Discord snowflake ID must be positive"
    SNOWFLAKE_TOO_LARGE = "Discord snowflake ID exceeds maximum value (2^64)"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Resolution
    RESOLUTION_FAILED = "Could not resolve '{query}'"
    NO_RESULTS = "no results"
    NO_STREAM_URL = "no stream URL"
    NOT_A_PLAYLIST = "not a playlist URL"
    STORAGE_NOT_AUDIO = "not an audio file"
    STORAGE_UNKNOWN_KEY = "unknown storage key"
    UNSUPPORTED_SOURCE = "no resolver handles source kind {kind}"

    # Startup
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN (or DISCORD_TOKEN) environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates; pass values as logger arguments, never pre-format."""

    # Voice transport
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    VOICE_CONNECTION_TIMEOUT = "Timeout connecting to channel %s"
    VOICE_NO_PERMISSION = "No permission to connect to channel %s"
    VOICE_CLIENT_ERROR = "Client error connecting: %r"
    VOICE_DISCONNECT_FAILED = "Failed to disconnect cleanly from guild %s: %r"
    GUILD_NOT_FOUND = "Guild %s not found"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"

    # Sink
    SINK_STARTED = "Sink started '%s' in guild %s at volume %s%%"
    SINK_ENDED = "Sink ended in guild %s: %s (error: %r)"
    SINK_STOP_FAILED = "Failed to stop sink in guild %s: %r"
    SINK_CALLBACK_ERROR = "Error delivering track end for guild %s: %r"
    FFMPEG_SOURCE_CLEANUP_ERROR = "Error cleaning up FFmpeg source: %r"

    # Registry
    SESSION_CREATED = "Created audio session for guild %s (channel %s)"
    SESSION_ALREADY_EXISTS = "Already connected to guild %s, join is a no-op"
    SESSION_STALE = "Voice connection for guild %s dropped, replacing its session"
    SESSION_REMOVED = "Removed audio session for guild %s"
    SESSION_REMOVE_MISSING = "No audio session to remove for guild %s"
    SESSION_CLOSE_ERROR = "Error while closing session for guild %s: %r"
    REGISTRY_CLOSED = "Closed %d audio sessions"

    # Sequencer
    TRACK_LOADING = "Loading '%s' in guild %s (generation %d)"
    TRACK_STARTED = "Started playing '%s' in guild %s (generation %d)"
    TRACK_ENDED = "Track '%s' ended in guild %s: %s"
    TRACK_FAILED_TO_START = "Could not start '%s' in guild %s, advancing: %s"
    TRACK_SKIPPED = "Skipping '%s' in guild %s"
    TRACK_SKIP_IN_FLIGHT = "Skip already in flight for guild %s"
    STALE_COMPLETION = "Ignoring stale completion in guild %s (generation %d, current %d)"
    LOADER_CANCELLED = "Cancelled audio source acquisition for '%s' in guild %s"
    QUEUE_DRAINED = "Queue drained in guild %s, auto-leave in %.1fs"
    IDLE_TIMER_CANCELLED = "Idle disconnect cancelled for guild %s"
    IDLE_DISCONNECT = "Auto-disconnecting from guild %s: queue empty"
    SFX_INTERRUPT = "Interrupting playback in guild %s for sound effect '%s'"
    PLAY_PREVIOUS = "Rewinding guild %s to '%s'"

    # Session mutations
    QUEUE_ENQUEUED = "Added '%s' to queue in guild %s (length %d)"
    QUEUE_ENQUEUED_FRONT = "Added '%s' to front of queue in guild %s"
    QUEUE_REMOVED = "Removed '%s' from queue in guild %s"
    QUEUE_MOVED_TO_FRONT = "Moved '%s' to front of queue in guild %s"
    QUEUE_CLEARED = "Cleared %d tracks from queue in guild %s"
    HISTORY_CLEARED = "Cleared %d tracks from history in guild %s"
    LOOP_MODE_CHANGED = "Loop mode changed to %s in guild %s"
    VOLUME_CHANGED = "%s changed to %d%% in guild %s"
    PLAYBACK_PAUSED = "Paused playback in guild %s"
    PLAYBACK_RESUMED = "Resumed playback in guild %s"

    # Resolution
    CACHE_HIT_URL = "Cache hit for URL: %s"
    CACHE_EXPIRED_CLEANED = "Cleaned %d expired cache entries"
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info from %s"
    YTDLP_FAILED_SEARCH = "Failed to search for %r"
    YTDLP_FAILED_EXTRACT_PLAYLIST = "Failed to extract playlist from %s"
    YTDLP_NO_STREAM_URL = "No stream URL found for %s"
    STORAGE_METADATA_FALLBACK = "Falling back to filename metadata for %s: %r"
    STORAGE_LISTED = "Listed %d audio files under %s"
    SFX_UNKNOWN_EFFECT = "Unknown sound effect %r, falling back to %r"

    # Commands
    COMMAND_REJECTED = "Command /%s rejected in guild %s: %s"

    # Application lifecycle
    BOT_STARTING = "Starting discord-jukebox in {environment} mode"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_STOPPED = "Bot stopped successfully"
    BOT_KEYBOARD_INTERRUPT = "Received keyboard interrupt, shutting down..."
    BOT_FATAL_ERROR = "Fatal error: %s"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_READY = "Bot ready as %s (%s)"
    BOT_CONNECTED_GUILDS = "Connected to %s guilds"
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s: %s"
    BOT_SYNCED_GUILD = "Synced %s commands to guild %s"
    BOT_SYNCED_GLOBAL = "Synced %s commands globally"
    BOT_SYNC_FAILED = "Failed to sync commands: %s"
    BOT_SLASH_COMMAND_ERROR = "Slash command /%s failed: %r"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Failed to send error message to user"
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %.1fs"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error during container shutdown: %r"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"


class DiscordUIMessages:
    """User-facing strings rendered by the slash-command cog."""

    POSITION_NOW_PLAYING = "Now playing"
    POSITION_IN_QUEUE = "#{position} in queue"

    SUCCESS_JOINED = "🎵 Joined **{channel}**."
    SUCCESS_LEFT = "👋 Left the voice channel."
    SUCCESS_STOPPED = "⏹️ Music stopped."
    SUCCESS_ENQUEUED = "🎵 **{title}** [{duration}] by {author}: {position}"
    SUCCESS_PLAYLIST_ENQUEUED = "📝 Added {count} tracks from the playlist."
    SUCCESS_SKIPPED = "⏭️ Skipped."
    SUCCESS_PAUSED = "⏸️ Paused."
    SUCCESS_RESUMED = "▶️ Resumed."
    SUCCESS_PREVIOUS = "⏮️ Going back to **{title}**."
    SUCCESS_LOOP = "🔁 Loop mode set to **{mode}**."
    SUCCESS_VOLUME = "🔊 Volume set to **{level}%**."
    SUCCESS_SFX_VOLUME = "🔊 Sound effect volume set to **{level}%**."
    SUCCESS_SFX = "🔊 Playing **{title}**."
    SUCCESS_REMOVED = "🗑️ Removed **{title}** from the queue."
    SUCCESS_MOVED = "⬆️ **{title}** will play next."
    SUCCESS_JUMPED = "⏩ Jumping to **{title}**."
    SUCCESS_QUEUE_CLEARED = "✅ Cleared {count} tracks from the queue."
    SUCCESS_HISTORY_CLEARED = "✅ Cleared {count} tracks from history."

    STATUS_NOT_CONNECTED = "Not connected to a voice channel."
    STATUS_HEADER = "**State:** {state} | **Loop:** {loop} | **Volume:** {volume}% | **SFX:** {sfx}%"
    STATUS_NOW_PLAYING = "**Now playing:** {title} [{duration}]"
    STATUS_QUEUE_LINE = "`{position}.` {title} [{duration}]"
    STATUS_QUEUE_EMPTY = "Queue is empty."
    STATUS_MORE = "...and {count} more"

    SEARCH_RESULT_LINE = "`{position}.` {title} [{duration}] by {author}"
    SEARCH_NO_RESULTS = "❌ No tracks found for your search."

    ERROR_PREFIX = "❌ {message}"
