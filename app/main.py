# app/main.py
import uvicorn

from app.api import create_app
from app.data.database import init_db
from app.utils.settings import HOST, PORT

# tabelas criadas antes de subir as rotas
init_db()

app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host=HOST, port=PORT)
