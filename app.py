import logging

from flask import Flask, jsonify

from tinydb import TinyDB
from tinydb.storages import MemoryStorage

from bcs_routes import bcs_bp, init_bcs_bp

DB = TinyDB(storage=MemoryStorage)   #Memory DB
# DB = TinyDB('db.json')             #Storage DB

logging.basicConfig(level=logging.INFO)

app = Flask(__name__)
app.secret_key = "key"

bcs_db = DB.table("bcs")
init_bcs_bp(bcs_db)
app.register_blueprint(bcs_bp)


@app.route("/")
def main():
    return jsonify({
        "name": "interactive-iop-study",
        "endpoints": sorted(
            str(rule) for rule in app.url_map.iter_rules() if rule.endpoint != "static"
        ),
    })


if __name__ == "__main__":
    app.run(debug=True)
