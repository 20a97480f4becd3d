from flask import Blueprint, request, jsonify
from flask_login import login_user, logout_user, login_required, current_user
from gridduel import db
from gridduel.models import User
from gridduel.services.auth import issue_token

main = Blueprint('main', __name__)


@main.route('/')
def index():
    return jsonify({'message': 'Welcome to the gridduel game server!'})


@main.route('/register', methods=['POST'])
def register():
    data = request.get_json(silent=True) or {}
    username = (data.get('username') or '').strip()
    password = data.get('password')
    if not username or not password:
        return jsonify({'error': 'Missing username or password'}), 400

    if User.query.filter_by(username=username).first():
        return jsonify({'error': 'Username already exists'}), 400

    user = User(username=username)
    user.set_password(password)
    db.session.add(user)
    db.session.commit()
    login_user(user)
    return jsonify({'user': user.to_dict(), 'token': issue_token(user)}), 201


@main.route('/login', methods=['POST'])
def login():
    data = request.get_json(silent=True) or {}
    user = User.query.filter_by(username=data.get('username')).first()
    if user and user.check_password(data.get('password') or ''):
        login_user(user, remember=True)
        return jsonify({'user': user.to_dict(), 'token': issue_token(user)})
    return jsonify({'error': 'Invalid username or password'}), 401


@main.route('/logout', methods=['POST'])
@login_required
def logout():
    logout_user()
    return jsonify({'message': 'Logged out successfully.'})


@main.route('/me')
@login_required
def me():
    return jsonify(current_user.to_dict())


@main.route('/token')
@login_required
def token():
    """Re-issue a socket token for the logged in user."""
    return jsonify({'token': issue_token(current_user)})


@main.route('/leaderboard')
def leaderboard():
    try:
        limit = max(1, min(int(request.args.get('limit', 10)), 100))
    except ValueError:
        limit = 10
    users = User.query.order_by(User.rating.desc(), User.username).limit(limit).all()
    return jsonify([u.to_dict() for u in users])
