from flipboard import create_app, socketio, start_room_sweeper

app = create_app()

if __name__ == '__main__':
    start_room_sweeper(app)
    # Use SocketIO server to enable websockets
    socketio.run(app, host=app.config['HOST'], port=app.config['PORT'], allow_unsafe_werkzeug=True)
