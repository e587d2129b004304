from leaderboarder import create_app, socketio
from leaderboarder.services.scheduler import start_credit_replenisher

app = create_app()

if __name__ == '__main__':
    start_credit_replenisher(app)
    socketio.run(app, debug=True, use_reloader=False)
