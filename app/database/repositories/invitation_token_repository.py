from app.database.connection import get_connection


class InvitationTokenRepository:
    """Database operations for the invitation_tokens table."""

    def create(self, apartment_id: str, company_id: str) -> str | None:
        """Insert a new invitation token row and return its generated token.

        The token value comes from the column default; every call creates a
        new row, earlier unconsumed tokens for the apartment stay valid.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO invitation_tokens (apartment_id, company_id)
                    VALUES (%s, %s)
                    RETURNING token
                    """,
                    (apartment_id, company_id),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None or row[0] is None:
            return None
        return str(row[0])
