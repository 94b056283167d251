"""SQL queries for the application state machine."""

APPLICATION_COLUMNS = """
        a.id,
        a.job_id,
        a.caregiver_id,
        a.message,
        a.status,
        a.created_at,
        a.updated_at
"""

# Insert a pending application only while the posting is open. Returns no row
# when the posting is missing or not open, or when the caregiver already applied.
INSERT_APPLICATION_IF_OPEN = f"""
    INSERT INTO applications AS a (job_id, caregiver_id, message, status, created_at, updated_at)
    SELECT p.id, %s::uuid, %s, 'pending', CURRENT_TIMESTAMP, CURRENT_TIMESTAMP
    FROM job_postings p
    WHERE p.id = %s AND p.status = 'open'
    ON CONFLICT (job_id, caregiver_id) DO NOTHING
    RETURNING {APPLICATION_COLUMNS}
"""

GET_POSTING_STATUS = """
    SELECT id, status, guardian_id
    FROM job_postings
    WHERE id = %s
"""

# Application together with the guardian who owns its posting
GET_APPLICATION_WITH_OWNER = f"""
    SELECT {APPLICATION_COLUMNS},
        p.guardian_id,
        p.title AS job_title,
        p.status AS job_status
    FROM applications a
    JOIN job_postings p ON p.id = a.job_id
    WHERE a.id = %s
"""

# Single conditional transition: only the owning guardian, only from pending.
DECIDE_APPLICATION = f"""
    UPDATE applications AS a
    SET status = %s, updated_at = CURRENT_TIMESTAMP
    FROM job_postings p
    WHERE a.id = %s
      AND a.job_id = p.id
      AND p.guardian_id = %s
      AND a.status = 'pending'
    RETURNING {APPLICATION_COLUMNS},
        p.guardian_id
"""

# Withdrawal deletes the row; only the applicant, only while pending.
WITHDRAW_APPLICATION = """
    DELETE FROM applications
    WHERE id = %s AND caregiver_id = %s AND status = 'pending'
    RETURNING id
"""

# Names and phone numbers of both sides, for notifications
GET_APPLICATION_CONTACTS = """
    SELECT
        p.title AS job_title,
        c.name AS caregiver_name,
        c.phone AS caregiver_phone,
        g.name AS guardian_name,
        g.phone AS guardian_phone
    FROM applications a
    JOIN job_postings p ON p.id = a.job_id
    LEFT JOIN users c ON c.id = a.caregiver_id
    LEFT JOIN users g ON g.id = p.guardian_id
    WHERE a.id = %s
"""

LIST_FOR_CAREGIVER = f"""
    SELECT {APPLICATION_COLUMNS},
        p.title AS job_title,
        p.status AS job_status,
        p.guardian_id,
        g.name AS guardian_name
    FROM applications a
    JOIN job_postings p ON p.id = a.job_id
    LEFT JOIN users g ON g.id = p.guardian_id
    WHERE a.caregiver_id = %s
    ORDER BY a.created_at DESC
"""

LIST_FOR_GUARDIAN = f"""
    SELECT {APPLICATION_COLUMNS},
        p.title AS job_title,
        p.status AS job_status,
        c.name AS caregiver_name,
        c.avatar_url AS caregiver_avatar_url
    FROM applications a
    JOIN job_postings p ON p.id = a.job_id
    LEFT JOIN users c ON c.id = a.caregiver_id
    WHERE p.guardian_id = %s
      AND (%s::uuid IS NULL OR a.job_id = %s::uuid)
    ORDER BY a.created_at DESC
"""
