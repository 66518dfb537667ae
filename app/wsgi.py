from app.guestbook import create_app

app = create_app()
