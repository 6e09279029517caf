"""Centralized message constants for error messages, log templates, and user feedback."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and user-facing failures."""

    # Command gating
    COOLDOWN_ACTIVE = "⏰ Please wait {seconds} more second(s) before using `/{command}` again."
    OWNER_ONLY = "❌ This command is restricted to bot owners only."
    GENERIC_FAILURE = "❌ An error occurred while executing this command!"
    DJ_REQUIRED = "❌ You need DJ permissions to use this command."
    ADMIN_REQUIRED = "❌ You need Administrator permissions to use this command."
    SERVER_ONLY = "❌ This command can only be used in a server."

    # Collaborators / state
    MUSIC_UNAVAILABLE = "❌ Music system is not available right now."
    NOTHING_PLAYING = "❌ No music is currently playing in this server."
    NO_CURRENT_TRACK = "❌ No track is currently playing."
    NOT_IN_VOICE = "❌ You need to be in a voice channel to use this command."
    VOICE_CONNECT_FAILED = "Could not connect to voice channel {channel_id}"
    STREAM_UNAVAILABLE = "Could not get a playable stream for '{title}'"
    PLAYBACK_START_FAILED = "Could not start playback: {error}"

    # Play
    NO_RESULTS = "❌ No results found for your search query."
    LOAD_FAILED = "Failed to load tracks for query: {query}"
    UNSUPPORTED_SOURCE = "❌ Search source `{source}` is not supported."
    QUEUE_FULL = "❌ The queue is full ({limit} tracks). Remove something first."
    SEARCH_KIND_MISMATCH = "❌ No {kind} found for that search. Try another type or query."
    SEARCH_SELECTION_INVALID = "❌ That search result is no longer available."
    INVITE_UNAVAILABLE = "❌ The invite link is not available until the bot has logged in."

    # Queue editing
    QUEUE_EMPTY_SHUFFLE = "❌ The queue is empty. Nothing to shuffle."
    QUEUE_ALREADY_EMPTY = "❌ The queue is already empty."
    INVALID_POSITION = "❌ Invalid position. The queue only has {size} tracks."
    INVALID_FROM_POSITION = "❌ Invalid 'from' position. The queue only has {size} tracks."
    INVALID_TO_POSITION = "❌ Invalid 'to' position. The queue only has {size} tracks."
    SAME_POSITION = "❌ The track is already at that position."
    NOT_ENOUGH_TO_SKIP = "❌ There are not enough tracks in the queue to skip {amount} tracks."
    PAGE_OUT_OF_RANGE = "❌ Page {page} does not exist. There are only {total_pages} page(s)."

    # Transport controls
    ALREADY_PAUSED = "⏸️ Music is already paused."
    NOT_PAUSED = "▶️ Music is not paused."
    SEEK_BEYOND_DURATION = "❌ Position cannot exceed track duration ({seconds} seconds)."
    SEEK_LIVE = "❌ Cannot seek in a live stream."
    UNKNOWN_LOOP_MODE = "❌ Unknown loop mode: {mode}"
    VOLUME_OUT_OF_RANGE = "❌ Volume must be between 0 and {max_volume}."

    # Guild settings
    NO_DJ_ROLE = "❌ No DJ role is currently set for this server."

    # Validation
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_TRANSITION = "Cannot transition from {current} to {target}"
    TIMEZONE_REQUIRED_UTC_DATETIME = "UtcDateTime requires a timezone-aware datetime"

    # Lifecycle
    DISCORD_TOKEN_REQUIRED = "DISCORD__TOKEN environment variable is required"
    BOT_NOT_INITIALIZED = "Bot not initialized. Call set_bot() first."
    CONTAINER_NOT_FOUND = "Container not found on bot instance"


class LogTemplates:
    """Log message templates.

    Use these with logger.info(), logger.error(), etc. and pass values as
    parameters so formatting is deferred until a record is emitted.
    """

    # Database
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"
    DATABASE_STATS_FAILED = "Failed to collect database stats: %s"
    DATABASE_ROLLBACK_FAILED = "Rollback failed: %r"
    GUILD_SETTINGS_SAVED = "Saved settings for guild %s"
    GUILD_SETTINGS_RESET = "Reset settings for guild %s"

    # Registry
    SESSION_CREATED = "Created session for guild %s (voice=%s, text=%s)"
    SESSION_CHANNELS_UPDATED = "Updated channels for guild %s (voice=%s, text=%s)"
    SESSION_DESTROYED = "Destroyed session for guild %s (reason=%s)"
    SESSION_CONNECT_FAILED = "Voice connection failed for guild %s: %r"
    SESSION_PLAYER_DESTROY_FAILED = "Player teardown failed for guild %s: %r"

    # Dispatcher
    COMMAND_UNKNOWN = "Unknown command received: %s"
    COMMAND_INVOKED = "Invoking /%s"
    COMMAND_COOLDOWN = "Cooldown active for /%s (%ss remaining)"
    COMMAND_OWNER_DENIED = "Owner-only /%s denied"
    COMMAND_USER_ERROR = "User error in /%s: %s"
    COMMAND_PERMISSION_DENIED = "Permission denied for /%s"
    COMMAND_UNAVAILABLE = "Collaborator unavailable for /%s: %s"
    COMMAND_COLLABORATOR_FAILED = "Collaborator %s failed during /%s: %s"
    COMMAND_FAILED = "Unhandled error during /%s"

    # Playback
    TRACK_STARTED = "Started playing '%s' in guild %s"
    TRACK_ENDED = "Track '%s' ended in guild %s (reason=%s)"
    TRACK_ERRORED = "Track '%s' errored in guild %s: %s"
    QUEUE_ENDED = "Queue ended in guild %s"
    PLAYBACK_ADVANCE_FAILED = "Could not start next track in guild %s: %r"
    TRACKS_ENQUEUED = "Enqueued %d track(s) in guild %s (queue=%d)"
    QUEUE_TRUNCATED = "Playlist truncated to %d track(s) in guild %s (limit=%d)"

    # Audio engine
    YTDLP_FAILED_EXTRACT_INFO = "Failed to extract info for %r"
    YTDLP_RESOLVED = "Resolved %r via %s: %s (%d track(s))"
    VOICE_CONNECTED = "Connected to voice channel %s in guild %s"
    VOICE_MOVED = "Moved to voice channel %s in guild %s"
    VOICE_DISCONNECT_FAILED = "Voice disconnect failed for guild %s: %r"
    FFMPEG_SEEK = "Seeking to %dms in guild %s"
    YTDLP_NO_STREAM_URL = "No stream URL for '%s'"
    YTDLP_ENTRY_SKIPPED = "Skipping unusable entry in %r"
    YTDLP_CACHE_HIT = "yt-dlp cache hit for %s"
    YTDLP_CACHE_EXPIRED = "Dropped %d expired yt-dlp cache entries"
    GUILD_NOT_FOUND = "Guild %s not found"
    CHANNEL_NOT_VOICE = "Channel %s is not a voice channel"
    VOICE_CONNECTION_TIMEOUT = "Timed out connecting to voice channel %s"
    VOICE_NO_PERMISSION = "Missing permission to join voice channel %s"
    VOICE_CLIENT_ERROR = "Voice client error: %s"
    VOICE_DISCONNECTED = "Disconnected from voice in guild %s"
    PLAYBACK_FAILED_START = "Failed to start playback in guild %s: %r"
    PLAYBACK_SOURCE_ERROR = "Audio source error in guild %s: %r"

    # Inactivity
    INACTIVITY_TIMER_STARTED = "Channel empty in guild %s, disconnecting in %ss"
    INACTIVITY_TIMER_CANCELLED = "Listener returned in guild %s, inactivity timer cancelled"
    INACTIVITY_DISCONNECT = "Disconnecting from guild %s due to inactivity"
    BOT_DISCONNECTED = "Bot was disconnected from voice in guild %s"

    # Notifications
    NOTIFY_FAILED = "Failed to deliver notification to channel %s: %r"
    INTERACTION_ACK_CLEANUP_FAILED = "Could not clear the placeholder reply: %r"
    NOTIFY_CHANNEL_MISSING = "Notification channel %s not found"

    # Snapshots
    SNAPSHOTS_SAVED = "Saved %d session snapshot(s)"
    SNAPSHOTS_LOADED = "Loaded %d session snapshot(s) from previous run"
    SNAPSHOT_SAVE_FAILED = "Failed to save session snapshots: %r"

    # Bot lifecycle
    BOT_STARTING = "Starting Moosek (environment=%s)"
    BOT_STOPPED = "Bot stopped"
    BOT_KEYBOARD_INTERRUPT = "Interrupted by keyboard"
    BOT_FATAL_ERROR = "Fatal error: %r"
    LOGGING_CONFIG_FALLBACK = "Could not load %s, falling back to basic config"
    BOT_SETUP = "Setting up bot..."
    BOT_SETUP_COMPLETE = "Bot setup complete"
    BOT_CONTAINER_INIT_FAILED = "Container initialization failed: %r"
    BOT_SHUTDOWN_COMPLETE = "Bot shutdown complete"
    BOT_ERROR_MESSAGE_SEND_FAILED = "Could not send error reply to interaction"
    BOT_STARTING_RUN = "Starting bot..."
    BOT_SHUTTING_DOWN = "Shutting down bot..."
    BOT_READY = "Bot ready as %s (%s)"
    BOT_COG_LOADED = "Loaded cog: %s"
    BOT_COG_LOAD_FAILED = "Failed to load cog %s"
    BOT_COGS_LOADED_SUMMARY = "Cogs loaded: %s success, %s failed"
    BOT_SYNCED_GUILD = "Synced %s commands to guild %s"
    BOT_SYNCED_GLOBAL = "Synced %s commands globally"
    BOT_SYNC_GLOBAL_FAILED = "Failed to sync commands globally: %s"
    BOT_SYNC_GUILD_FAILED = "Failed to sync commands to guild %s: %s"
    BOT_SIGNAL_RECEIVED = "Received %s, shutting down"
    BOT_SHUTDOWN_TIMEOUT = "Graceful shutdown timed out after %.1fs"
    BOT_LOOP_EXCEPTION = "Unhandled exception in event loop: %s"
    BOT_CONTAINER_SHUTDOWN_ERROR = "Error shutting down container: %r"
    BOT_APP_COMMAND_ERROR = "App command error in /%s"
    BOT_GUILD_REMOVED = "Removed from guild %s, destroying session"
    SHUTDOWN_REQUESTED = "Shutdown requested by user %s"
    SEARCH_COMPLETED = "Search %r via %s (%s) returned %d result(s)"
    SEARCH_ACTION_FAILED = "Search action failed in guild %s: %s"

    # Container
    SUBSCRIBER_STOP_FAILED = "Failed to stop %s: %r"


class DiscordUIMessages:
    """Strings rendered into Discord replies and embeds."""

    # Play
    TRACK_ADDED = "✅ Track added to queue!"
    EMBED_TRACK_ADDED = "➕ Track Added to Queue"
    EMBED_PLAYLIST_ADDED = "📀 Playlist Added to Queue"
    PLAYLIST_ADDED_DESCRIPTION = "Added **{count}** tracks from **{name}**"
    PLAYLIST_TRUNCATED_NOTE = "Only {count} of {total} tracks fit in the queue."

    # Transport
    EMBED_TRACK_SKIPPED = "⏭️ Track Skipped"
    SKIPPED_ONE = "Skipped **{title}**"
    SKIPPED_MANY = "Skipped **{count}** tracks"
    FIELD_SKIPPED_TRACKS = "🎵 Skipped Tracks"
    FIELD_NEXT_UP = "⏭️ Next Up"
    EMBED_PAUSED = "⏸️ Music Paused"
    EMBED_RESUMED = "▶️ Music Resumed"
    EMBED_STOPPED = "⏹️ Music Stopped"
    STOPPED_DESCRIPTION = "Playback stopped and the queue was cleared."
    EMBED_SEEKED = "⏰ Seeked"
    SEEKED_DESCRIPTION = "Jumped to **{position}** in **{title}**"
    EMBED_VOLUME = "🔊 Volume Adjusted"
    VOLUME_DESCRIPTION = "Volume set to **{volume}%**"
    EMBED_LOOP = "🔁 Loop Mode Changed"
    LOOP_DESCRIPTION = "{emoji} Loop mode: **{mode}**"

    # Queue
    EMBED_QUEUE = "📋 Music Queue"
    EMBED_QUEUE_SHUFFLED = "🔀 Queue Shuffled"
    SHUFFLED_DESCRIPTION = "Shuffled **{count}** tracks ({mode})"
    EMBED_TRACK_MOVED = "🔄 Track Moved"
    MOVED_DESCRIPTION = "Moved **{title}** from position {src} to {dst}"
    EMBED_TRACK_REMOVED = "🗑️ Track Removed"
    REMOVED_DESCRIPTION = "Removed **{title}** from position {position}"
    EMBED_QUEUE_CLEARED = "🗑️ Queue Cleared"
    CLEARED_DESCRIPTION = "Cleared {count} tracks from the queue."
    QUEUE_NOTHING_MATCHES = "No tracks match this filter."
    QUEUE_FOOTER = "Page {page}/{total_pages} • {count} track(s) • filter: {filter} • sort: {sort}"
    QUEUE_UP_NEXT = "Up Next"
    QUEUE_NOW_PLAYING = "Now Playing"
    QUEUE_STATISTICS = "Statistics"
    QUEUE_STATS_VALUE = (
        "Total: **{total}** • Tracks: **{count}** • Average: **{average}**\n"
        "Loop: **{loop}** • Volume: **{volume}%**"
    )
    QUEUE_LINE = "`{position}.` **{title}** by {author} [`{duration}`] • <@{requester}>"

    # Now playing
    EMBED_NOW_PLAYING = "🎵 Now Playing"
    NOW_PLAYING_LINE = "**[{title}]({uri})**\nby {author}"

    # Notifications
    EMBED_TRACK_FINISHED = "✅ Track Finished"
    EMBED_TRACK_ERROR = "❌ Track Error"
    TRACK_ERROR_ACTION = "Skipping to next track..."
    EMBED_QUEUE_FINISHED = "🏁 Queue Finished"
    QUEUE_FINISHED_DESCRIPTION = "All tracks in the queue have been played!"
    QUEUE_FINISHED_TIPS = "Use `/play` to add more music or `/loop queue` to keep the party going."
    INACTIVITY_DISCONNECT = "🔌 Disconnected from voice channel due to inactivity."
    EMBED_RESUMABLE = "♻️ Restarted"
    RESUMABLE_DESCRIPTION = "I restarted while playing **{title}** with {count} track(s) queued. Use `/play` to start again."

    # Field names
    FIELD_ARTIST = "Artist"
    FIELD_DURATION = "Duration"
    FIELD_VOLUME = "Volume"
    FIELD_QUEUE_SIZE = "Queue Size"
    FIELD_LOOP_MODE = "Loop Mode"
    FIELD_STATUS = "Status"
    FIELD_ERROR = "Error"
    FIELD_ACTION = "Action"
    FIELD_WHATS_NEXT = "What's Next?"
    FIELD_POSITION = "Position"
    FIELD_TOTAL = "Total in Queue"
    FIELD_ESTIMATED_WAIT = "Estimated Wait"
    FIELD_REQUESTED_BY = "Requested by"
    FIELD_PROGRESS = "Progress"
    STATUS_COMPLETED = "Completed"
    STATUS_STOPPED = "Stopped"
    LIVE = "🔴 LIVE"

    # DJ / admin
    EMBED_DJ_SETTINGS = "🎛️ DJ Settings"
    DJ_ROLE_SET = "✅ DJ role set to <@&{role_id}>."
    DJ_ROLE_REMOVED = "✅ DJ role removed. Members with Manage Server can now control playback."
    DJ_RULE_ROLE = "Only members with <@&{role_id}> (or Administrators) can control playback."
    DJ_RULE_MANAGE_GUILD = "No DJ role set. Members with Manage Server (or Administrators) can control playback."
    EMBED_SERVER_SETTINGS = "⚙️ Server Settings"
    EMBED_SETTINGS_UPDATED = "✅ Settings Updated"
    EMBED_SETTINGS_RESET = "✅ Settings Reset"
    SETTINGS_RESET_DESCRIPTION = "All settings were restored to their defaults."
    FIELD_DJ_ROLE = "DJ Role"
    FIELD_MUSIC_CHANNEL = "Music Channel"
    FIELD_AUTO_PLAY = "Auto Play"
    FIELD_MAX_QUEUE = "Max Queue Size"
    FIELD_MUSIC_STATUS = "Music Status"
    STATUS_IDLE = "Not connected"
    MUSIC_STATUS_VALUE = "{state} • {queued} queued • volume {volume}%"
    VALUE_NONE = "None"
    VALUE_ENABLED = "Enabled"
    VALUE_DISABLED = "Disabled"

    # General
    PING = "🏓 Pong! Latency: **{latency_ms}ms**"
    EMBED_STATS = "📊 Bot Statistics"
    STATS_VALUE = (
        "Servers: **{guilds}**\nActive sessions: **{sessions}**\n"
        "Playing: **{playing}** • Paused: **{paused}**\nQueued tracks: **{queued}**"
    )
    EMBED_HELP = "❓ Commands"
    HELP_LINE = "`/{name}` {description}"
    SHUTDOWN_ACK = "👋 Shutting down..."
    EMBED_UPTIME = "⏱️ Bot Uptime"
    FIELD_UPTIME = "⏰ Uptime"
    FIELD_STARTED = "🚀 Started"
    FIELD_ACTIVE_SESSIONS = "🎵 Active Sessions"
    EMBED_VERSION = "📦 Version"
    VERSION_DESCRIPTION = "Moosek **v{version}**"
    EMBED_INVITE = "📨 Invite Moosek"
    INVITE_DESCRIPTION = "Add Moosek to your server: [Invite Bot]({url})"
    FIELD_REQUIRED_PERMISSIONS = "⚙️ Required Permissions"
    REQUIRED_PERMISSIONS = "Send Messages • Embed Links • Connect • Speak • Use Slash Commands"
    EMBED_SUPPORT = "🆘 Support"
    SUPPORT_DESCRIPTION = "Need help? [Join the support server]({url})"
    SUPPORT_NOT_CONFIGURED = "No support server is configured for this bot."
    FIELD_COMMON_ISSUES = "❓ Common Issues"
    COMMON_ISSUES = (
        "• **Music not playing?** Join a voice channel first.\n"
        "• **Permission errors?** Ask an admin to check `/dj list`.\n"
        "• **Commands missing?** They can take a few minutes to appear."
    )

    # Search
    EMBED_SEARCH_RESULTS = "🔍 Search Results"
    SEARCH_RESULTS_DESCRIPTION = "Found **{count}** result(s) for **\"{query}\"**"
    EMBED_PLAYLIST_FOUND = "📀 Playlist Found"
    FIELD_SEARCH_FILTERS = "🔧 Search Filters"
    SEARCH_FILTERS_VALUE = "**Source:** {source} • **Type:** {kind}"
    FIELD_RESULTS = "🎵 Results"
    SEARCH_RESULT_LINE = "**{index}.** [{title}]({uri})\n└ 🎤 {author} • ⏱️ {duration}"
    FIELD_TRACKS = "🎵 Tracks"
    SEARCH_FOOTER = "Pick a result below, or play them all."
    SEARCH_RESULTS_NAME = "search results for \"{query}\""
    SEARCH_CANCELLED = "❌ Search cancelled."
    SEARCH_SELECT_PLACEHOLDER = "Choose a track to queue"
    BUTTON_PLAY_ALL = "▶️ Play All"
    BUTTON_SHUFFLE_PLAY = "🔀 Shuffle & Play"
    BUTTON_CANCEL = "❌ Cancel"

    # Views
    BUTTON_PREVIOUS = "◀️"
    BUTTON_NEXT = "▶️"
    VIEW_NOT_YOURS = "❌ Only the person who ran this command can use these buttons."


class EmojiConstants:
    """Reusable emoji used in replies."""

    SUCCESS = "✅"
    ERROR = "❌"
    PLAY = "▶️"
    PAUSE = "⏸️"
    LOOP_NONE = "➡️"
    LOOP_TRACK = "🔂"
    LOOP_QUEUE = "🔁"
    PROGRESS_FILLED = "▬"
    PROGRESS_HEAD = "🔘"
