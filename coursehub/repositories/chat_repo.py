"""Firestore accessors for chat rooms and messages."""


def room_ref(db, room_id):
    return db.collection('chat_rooms').document(room_id)


def get_room(db, room_id):
    return room_ref(db, room_id).get()


def message_ref(db, message_id):
    return db.collection('chat_messages').document(message_id)


def get_message(db, message_id):
    return message_ref(db, message_id).get()


def delete_message(db, message_id):
    return message_ref(db, message_id).delete()
