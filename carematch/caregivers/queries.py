"""SQL queries for caregiver profiles."""

PROFILE_COLUMNS = """
        id,
        user_id,
        experience_years,
        certifications,
        specializations,
        introduction,
        hourly_rate,
        is_available,
        location,
        created_at,
        updated_at
"""

GET_PROFILE_BY_USER = f"""
    SELECT {PROFILE_COLUMNS}
    FROM caregiver_profiles
    WHERE user_id = %s
"""

# Replaces every editable field. Only caregivers can hold a profile; no row
# back means the user is missing or is not a caregiver.
UPSERT_PROFILE = f"""
    INSERT INTO caregiver_profiles (
        user_id, experience_years, certifications, specializations,
        introduction, hourly_rate, is_available, location, created_at, updated_at
    )
    SELECT u.id, %s, %s, %s, %s, %s, %s, %s, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP
    FROM users u
    WHERE u.id = %s AND u.role = 'caregiver'
    ON CONFLICT (user_id) DO UPDATE SET
        experience_years = EXCLUDED.experience_years,
        certifications = EXCLUDED.certifications,
        specializations = EXCLUDED.specializations,
        introduction = EXCLUDED.introduction,
        hourly_rate = EXCLUDED.hourly_rate,
        is_available = EXCLUDED.is_available,
        location = EXCLUDED.location,
        updated_at = CURRENT_TIMESTAMP
    RETURNING {PROFILE_COLUMNS}
"""

# Public detail: no email or phone. profile_* columns are NULL without a profile.
GET_CAREGIVER_DETAIL = """
    SELECT
        u.id,
        u.name,
        u.avatar_url,
        u.created_at,
        cp.id AS profile_id,
        cp.experience_years AS profile_experience_years,
        cp.certifications AS profile_certifications,
        cp.specializations AS profile_specializations,
        cp.introduction AS profile_introduction,
        cp.hourly_rate AS profile_hourly_rate,
        cp.is_available AS profile_is_available,
        cp.location AS profile_location
    FROM users u
    LEFT JOIN caregiver_profiles cp ON cp.user_id = u.id
    WHERE u.id = %s AND u.role = 'caregiver'
"""

GET_RECENT_REVIEWS = """
    SELECT
        r.id,
        r.job_id,
        r.rating,
        r.comment,
        r.created_at,
        rv.name AS reviewer_name
    FROM reviews r
    LEFT JOIN users rv ON rv.id = r.reviewer_id
    WHERE r.reviewee_id = %s
    ORDER BY r.created_at DESC
    LIMIT %s
"""

# Average is derived on read over every review, not just the listed ones.
GET_RATING_SUMMARY = """
    SELECT
        COALESCE(ROUND(AVG(rating)::numeric, 1), 0) AS average_rating,
        COUNT(*) AS review_count
    FROM reviews
    WHERE reviewee_id = %s
"""

# Caregivers with a profile. Filters are optional; a NULL parameter disables
# its clause. location matches as a prefix ("Seoul" matches "Seoul Mapo-gu").
LIST_CAREGIVERS = """
    SELECT
        u.id,
        u.name,
        u.avatar_url,
        cp.experience_years,
        cp.certifications,
        cp.specializations,
        cp.introduction,
        cp.hourly_rate,
        cp.is_available,
        cp.location,
        COALESCE(ROUND(rs.average_rating::numeric, 1), 0) AS average_rating,
        COALESCE(rs.review_count, 0) AS review_count
    FROM users u
    JOIN caregiver_profiles cp ON cp.user_id = u.id
    LEFT JOIN (
        SELECT reviewee_id, AVG(rating) AS average_rating, COUNT(*) AS review_count
        FROM reviews
        GROUP BY reviewee_id
    ) rs ON rs.reviewee_id = u.id
    WHERE u.role = 'caregiver'
      AND (%s::text IS NULL OR cp.location ILIKE %s::text || '%%')
      AND (NOT %s::boolean OR cp.is_available)
    ORDER BY u.created_at DESC
"""
