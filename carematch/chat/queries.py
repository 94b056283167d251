"""SQL queries for chat rooms and the message log."""

ROOM_COLUMNS = """
        r.id,
        r.job_id,
        r.caregiver_id,
        r.guardian_id,
        r.created_at,
        r.updated_at
"""

# Atomic insert-if-absent keyed on the (caregiver, guardian) pair.
# Returns no row when the room already exists.
INSERT_ROOM_IF_ABSENT = f"""
    INSERT INTO chat_rooms AS r (job_id, caregiver_id, guardian_id, created_at, updated_at)
    VALUES (%s, %s, %s, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
    ON CONFLICT (caregiver_id, guardian_id) DO NOTHING
    RETURNING {ROOM_COLUMNS}
"""

GET_ROOM_BY_PAIR = f"""
    SELECT {ROOM_COLUMNS}
    FROM chat_rooms r
    WHERE r.caregiver_id = %s AND r.guardian_id = %s
"""

GET_ROOM_BY_ID = f"""
    SELECT {ROOM_COLUMNS}
    FROM chat_rooms r
    WHERE r.id = %s
"""

# Locks the room row for the rest of the transaction so that appends to one
# room are serialized. Participant contacts are returned for notifications.
LOCK_ROOM_FOR_APPEND = f"""
    SELECT {ROOM_COLUMNS},
        c.name AS caregiver_name,
        c.phone AS caregiver_phone,
        g.name AS guardian_name,
        g.phone AS guardian_phone
    FROM chat_rooms r
    LEFT JOIN users c ON c.id = r.caregiver_id
    LEFT JOIN users g ON g.id = r.guardian_id
    WHERE r.id = %s
    FOR UPDATE OF r
"""


def _list_rooms_query(participant_column: str) -> str:
    return f"""
    SELECT {ROOM_COLUMNS},
        j.title AS job_title,
        j.status AS job_status,
        c.name AS caregiver_name,
        c.avatar_url AS caregiver_avatar_url,
        g.name AS guardian_name,
        g.avatar_url AS guardian_avatar_url,
        lm.id AS last_message_id,
        lm.sender_id AS last_message_sender_id,
        lm.content AS last_message_content,
        lm.is_read AS last_message_is_read,
        lm.created_at AS last_message_created_at,
        (
            SELECT COUNT(*)
            FROM messages um
            WHERE um.room_id = r.id
              AND um.sender_id <> %s
              AND NOT um.is_read
        ) AS unread_count
    FROM chat_rooms r
    LEFT JOIN job_postings j ON j.id = r.job_id
    LEFT JOIN users c ON c.id = r.caregiver_id
    LEFT JOIN users g ON g.id = r.guardian_id
    LEFT JOIN LATERAL (
        SELECT m.id, m.sender_id, m.content, m.is_read, m.created_at
        FROM messages m
        WHERE m.room_id = r.id
        ORDER BY m.created_at DESC, m.message_seq DESC
        LIMIT 1
    ) lm ON true
    WHERE r.{participant_column} = %s
    ORDER BY r.updated_at DESC
"""


LIST_ROOMS_FOR_GUARDIAN = _list_rooms_query("guardian_id")
LIST_ROOMS_FOR_CAREGIVER = _list_rooms_query("caregiver_id")

MESSAGE_COLUMNS = """
        m.id,
        m.room_id,
        m.sender_id,
        u.name AS sender_name,
        m.content,
        m.is_read,
        m.created_at
"""

# Server-assigned timestamps are strictly increasing within a room: never
# earlier than one microsecond after the newest existing message. The caller
# holds the room lock, so the MAX() read cannot race another append.
INSERT_MESSAGE = """
    INSERT INTO messages (room_id, sender_id, content, is_read, created_at)
    VALUES (
        %s, %s, %s, false,
        GREATEST(
            clock_timestamp(),
            (SELECT MAX(created_at) FROM messages WHERE room_id = %s) + interval '1 microsecond'
        )
    )
    RETURNING id, room_id, sender_id, content, is_read, created_at
"""

TOUCH_ROOM = """
    UPDATE chat_rooms
    SET updated_at = %s
    WHERE id = %s
"""

# Newest-first so LIMIT keeps the most recent rows; the service reverses them.
PAGE_BEFORE_CURSOR = f"""
    SELECT {MESSAGE_COLUMNS}
    FROM messages m
    LEFT JOIN users u ON u.id = m.sender_id
    WHERE m.room_id = %s AND m.created_at < %s
    ORDER BY m.created_at DESC, m.message_seq DESC
    LIMIT %s
"""

PAGE_LATEST = f"""
    SELECT {MESSAGE_COLUMNS}
    FROM messages m
    LEFT JOIN users u ON u.id = m.sender_id
    WHERE m.room_id = %s
    ORDER BY m.created_at DESC, m.message_seq DESC
    LIMIT %s
"""

PAGE_AFTER_CURSOR = f"""
    SELECT {MESSAGE_COLUMNS}
    FROM messages m
    LEFT JOIN users u ON u.id = m.sender_id
    WHERE m.room_id = %s AND m.created_at > %s
    ORDER BY m.created_at ASC, m.message_seq ASC
    LIMIT %s
"""

PAGE_FROM_START = f"""
    SELECT {MESSAGE_COLUMNS}
    FROM messages m
    LEFT JOIN users u ON u.id = m.sender_id
    WHERE m.room_id = %s
    ORDER BY m.created_at ASC, m.message_seq ASC
    LIMIT %s
"""

# Only the other participant's messages are ever marked read by a reader.
MARK_OTHERS_READ = """
    UPDATE messages
    SET is_read = true
    WHERE room_id = %s AND sender_id <> %s AND NOT is_read
"""
