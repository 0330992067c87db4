from sqlmodel import Session, select
from passport.db import engine, init_db
from passport.models import User, UserRole

def create_admin_user(email: str = "admin@example.com", password: str = "admin"):
    """
    Creates a default admin user if one doesn't already exist.
    """
    init_db()
    with Session(engine) as session:
        admin_user = session.exec(select(User).where(User.email == email)).first()
        if admin_user:
            print("Admin user already exists.")
            return

        print("Creating admin user...")
        admin_user = User(name="Admin User", email=email, role=UserRole.ADMIN)
        admin_user.set_password(password)
        session.add(admin_user)
        session.commit()
        print("Admin user created successfully.")

if __name__ == "__main__":
    create_admin_user()
