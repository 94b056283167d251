"""SQL queries for the review gate."""

GET_COMPLETED_POSTING = """
    SELECT
        id,
        guardian_id,
        title,
        location,
        start_date,
        end_date,
        hourly_rate,
        status,
        created_at,
        updated_at
    FROM job_postings
    WHERE id = %s AND status = 'completed'
"""

# Enforced unique by applications_single_accepted_idx
GET_ACCEPTED_CAREGIVER = """
    SELECT caregiver_id
    FROM applications
    WHERE job_id = %s AND status = 'accepted'
"""

GET_USER_SUMMARY = """
    SELECT id, name, avatar_url, role
    FROM users
    WHERE id = %s
"""

REVIEW_EXISTS = """
    SELECT EXISTS (
        SELECT 1 FROM reviews
        WHERE job_id = %s AND reviewer_id = %s AND reviewee_id = %s
    )
"""

INSERT_REVIEW = """
    INSERT INTO reviews (job_id, reviewer_id, reviewee_id, rating, comment, created_at)
    VALUES (%s, %s, %s, %s, %s, CURRENT_TIMESTAMP)
    ON CONFLICT (job_id, reviewer_id, reviewee_id) DO NOTHING
    RETURNING id, job_id, reviewer_id, reviewee_id, rating, comment, created_at
"""

# Filters are optional; a NULL parameter disables its clause.
LIST_REVIEWS = """
    SELECT
        r.id,
        r.job_id,
        j.title AS job_title,
        r.reviewer_id,
        rv.name AS reviewer_name,
        rv.role AS reviewer_role,
        r.reviewee_id,
        re.name AS reviewee_name,
        re.role AS reviewee_role,
        r.rating,
        r.comment,
        r.created_at
    FROM reviews r
    LEFT JOIN job_postings j ON j.id = r.job_id
    LEFT JOIN users rv ON rv.id = r.reviewer_id
    LEFT JOIN users re ON re.id = r.reviewee_id
    WHERE (%s::uuid IS NULL OR r.reviewee_id = %s::uuid)
      AND (%s::uuid IS NULL OR r.job_id = %s::uuid)
    ORDER BY r.created_at DESC
"""

# Average is derived on read; nothing is cached.
REVIEW_STATS = """
    SELECT
        COALESCE(ROUND(AVG(rating)::numeric, 1), 0) AS average_rating,
        COUNT(*) AS total_count
    FROM reviews
    WHERE (%s::uuid IS NULL OR reviewee_id = %s::uuid)
      AND (%s::uuid IS NULL OR job_id = %s::uuid)
"""
