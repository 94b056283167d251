"""SQL queries for the role dashboards."""

GET_USER_BRIEF = """
    SELECT id, name, email, role
    FROM users
    WHERE id = %s
"""

CAREGIVER_RECENT_APPLICATIONS = """
    SELECT
        a.id,
        a.job_id,
        a.message,
        a.status,
        a.created_at,
        a.updated_at,
        json_build_object(
            'id', j.id,
            'title', j.title,
            'location', j.location,
            'hourly_rate', j.hourly_rate,
            'status', j.status
        ) AS job
    FROM applications a
    JOIN job_postings j ON j.id = a.job_id
    WHERE a.caregiver_id = %s
    ORDER BY a.created_at DESC
    LIMIT %s
"""

CAREGIVER_APPLICATION_STATS = """
    SELECT
        COUNT(*) AS total_applications,
        COUNT(*) FILTER (WHERE status = 'pending') AS pending_applications,
        COUNT(*) FILTER (WHERE status = 'accepted') AS accepted_applications
    FROM applications
    WHERE caregiver_id = %s
"""

GUARDIAN_RECENT_POSTINGS = """
    SELECT
        j.id,
        j.title,
        j.location,
        j.start_date,
        j.hourly_rate,
        j.status,
        j.created_at,
        COALESCE(
            (
                SELECT json_agg(
                    json_build_object(
                        'id', a.id,
                        'caregiver_id', a.caregiver_id,
                        'caregiver_name', u.name,
                        'status', a.status,
                        'created_at', a.created_at
                    )
                    ORDER BY a.created_at
                )
                FROM applications a
                LEFT JOIN users u ON u.id = a.caregiver_id
                WHERE a.job_id = j.id
            ),
            '[]'::json
        ) AS applications
    FROM job_postings j
    WHERE j.guardian_id = %s
    ORDER BY j.created_at DESC
    LIMIT %s
"""

GUARDIAN_POSTING_STATS = """
    SELECT
        COUNT(*) AS total_jobs,
        COUNT(*) FILTER (WHERE status = 'open') AS open_jobs
    FROM job_postings
    WHERE guardian_id = %s
"""

GUARDIAN_APPLICATION_STATS = """
    SELECT
        COUNT(*) AS total_applications,
        COUNT(*) FILTER (WHERE a.status = 'pending') AS pending_applications
    FROM applications a
    JOIN job_postings j ON j.id = a.job_id
    WHERE j.guardian_id = %s
"""
