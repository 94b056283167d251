"""SQL queries for job postings."""

POSTING_COLUMNS = """
        p.id,
        p.guardian_id,
        p.title,
        p.description,
        p.location,
        p.care_type,
        p.start_date,
        p.end_date,
        p.hourly_rate,
        p.patient_age,
        p.patient_gender,
        p.patient_condition,
        p.status,
        p.created_at,
        p.updated_at
"""

# Query to insert a new posting (always created open)
INSERT_POSTING = f"""
    INSERT INTO job_postings AS p (
        guardian_id, title, description, location, care_type, start_date, end_date,
        hourly_rate, patient_age, patient_gender, patient_condition, status,
        created_at, updated_at
    )
    VALUES (%s, %s, %s, %s, %s, %s, %s, %s, %s, %s, %s, 'open', CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
    RETURNING {POSTING_COLUMNS}
"""

# Query to get a single posting with its guardian's display name
GET_POSTING_BY_ID = f"""
    SELECT {POSTING_COLUMNS},
        u.name AS guardian_name
    FROM job_postings p
    LEFT JOIN users u ON u.id = p.guardian_id
    WHERE p.id = %s
"""

# Base query for the public posting list. Filters are appended by the service
# as fixed clauses with bound parameters.
LIST_POSTINGS_BASE = f"""
    SELECT {POSTING_COLUMNS},
        u.name AS guardian_name
    FROM job_postings p
    LEFT JOIN users u ON u.id = p.guardian_id
    WHERE p.status = %s
"""

FILTER_CARE_TYPE = " AND p.care_type = %s"
FILTER_LOCATION = " AND p.location ILIKE %s"
ORDER_NEWEST_FIRST = " ORDER BY p.created_at DESC"

# Query to list a guardian's own postings
LIST_GUARDIAN_POSTINGS = f"""
    SELECT {POSTING_COLUMNS}
    FROM job_postings p
    WHERE p.guardian_id = %s
    ORDER BY p.created_at DESC
"""

# Query to list applications for a set of postings
LIST_APPLICATIONS_FOR_POSTINGS = """
    SELECT
        a.id,
        a.job_id,
        a.caregiver_id,
        u.name AS caregiver_name,
        a.message,
        a.status,
        a.created_at,
        a.updated_at
    FROM applications a
    LEFT JOIN users u ON u.id = a.caregiver_id
    WHERE a.job_id = ANY(%s::uuid[])
    ORDER BY a.created_at DESC
"""

# Query to check whether a posting already has a matched caregiver
HAS_ACCEPTED_APPLICATION = """
    SELECT EXISTS (
        SELECT 1 FROM applications WHERE job_id = %s AND status = 'accepted'
    )
"""

# Persist the whole patched posting. Guarded by the updated_at that was read,
# so a concurrent edit makes this match zero rows instead of being overwritten.
UPDATE_POSTING = f"""
    UPDATE job_postings AS p
    SET title = %s,
        description = %s,
        location = %s,
        care_type = %s,
        start_date = %s,
        end_date = %s,
        hourly_rate = %s,
        patient_age = %s,
        patient_gender = %s,
        patient_condition = %s,
        status = %s,
        updated_at = CURRENT_TIMESTAMP
    WHERE p.id = %s AND p.guardian_id = %s AND p.updated_at = %s
    RETURNING {POSTING_COLUMNS}
"""

# Contacts of both sides of a matched posting, for review requests
GET_MATCH_CONTACTS = """
    SELECT
        p.title AS job_title,
        g.name AS guardian_name,
        g.phone AS guardian_phone,
        c.name AS caregiver_name,
        c.phone AS caregiver_phone
    FROM job_postings p
    JOIN applications a ON a.job_id = p.id AND a.status = 'accepted'
    LEFT JOIN users g ON g.id = p.guardian_id
    LEFT JOIN users c ON c.id = a.caregiver_id
    WHERE p.id = %s
"""
