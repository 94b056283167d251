"""SQL queries for user profiles."""

USER_COLUMNS = """
        id,
        email,
        name,
        phone,
        role,
        avatar_url,
        created_at,
        updated_at
"""

# Query to get user by ID
GET_USER_BY_ID = f"""
    SELECT {USER_COLUMNS}
    FROM users
    WHERE id = %s
"""

# Query to create the user row at profile completion.
# The id is the one issued by the identity provider. A conflict on id or email
# means the profile is already complete.
INSERT_USER = f"""
    INSERT INTO users (id, email, name, phone, role, avatar_url, created_at, updated_at)
    VALUES (%s, %s, %s, %s, %s, %s, CURRENT_TIMESTAMP, CURRENT_TIMESTAMP)
    ON CONFLICT DO NOTHING
    RETURNING {USER_COLUMNS}
"""

# Query to create the empty caregiver profile that goes with a new caregiver
INSERT_INITIAL_CAREGIVER_PROFILE = """
    INSERT INTO caregiver_profiles (user_id, introduction, is_available)
    VALUES (%s, %s, true)
    RETURNING id
"""
