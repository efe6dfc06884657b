from datetime import datetime
import json

from flask_login import UserMixin

from livescore import bcrypt, db
from livescore.services.scoring.rules import SCHEDULED, SET_SPORTS


class User(UserMixin, db.Model):
    __tablename__ = 'user'
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    def set_password(self, password):
        self.password_hash = bcrypt.generate_password_hash(password).decode('utf-8')

    def check_password(self, password):
        return bcrypt.check_password_hash(self.password_hash, password)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
        }


class Team(db.Model):
    __tablename__ = 'team'
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(128), unique=True, nullable=False)
    short_code = db.Column(db.String(8), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'short_code': self.short_code,
        }


def _loads(raw, default):
    if not raw:
        return default
    return json.loads(raw)


class Match(db.Model):
    __tablename__ = 'match'
    id = db.Column(db.Integer, primary_key=True)
    sport = db.Column(db.String(32), nullable=False, index=True)
    status = db.Column(db.String(16), nullable=False, default=SCHEDULED, index=True)
    team_a_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=False)
    team_b_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=False)
    winner_id = db.Column(db.Integer, db.ForeignKey('team.id'), nullable=True)
    score_a = db.Column(db.Integer, nullable=False, default=0)
    score_b = db.Column(db.Integer, nullable=False, default=0)
    period = db.Column(db.Integer, nullable=True)
    max_sets = db.Column(db.Integer, nullable=True)
    current_server = db.Column(db.String(1), nullable=True)
    toss_winner = db.Column(db.String(1), nullable=True)  # 'A' or 'B'
    toss_decision = db.Column(db.String(32), nullable=True)
    venue = db.Column(db.String(128), nullable=True)
    scheduled_at = db.Column(db.DateTime, nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)
    # JSON-encoded sport sub-state
    cricket_data = db.Column(db.Text, nullable=True)
    current_set_data = db.Column(db.Text, nullable=True)
    set_details_data = db.Column(db.Text, nullable=True)
    score_deltas_data = db.Column(db.Text, nullable=True)
    version_id = db.Column(db.Integer, nullable=False)

    team_a = db.relationship('Team', foreign_keys=[team_a_id])
    team_b = db.relationship('Team', foreign_keys=[team_b_id])
    winner = db.relationship('Team', foreign_keys=[winner_id])
    fouls = db.relationship('Foul', back_populates='match', cascade='all, delete-orphan', order_by='Foul.id')

    __mapper_args__ = {'version_id_col': version_id}

    def __init__(self, **kwargs):
        super(Match, self).__init__(**kwargs)
        if self.status is None:
            self.status = SCHEDULED
        if self.score_a is None:
            self.score_a = 0
        if self.score_b is None:
            self.score_b = 0

    # ---- sub-state accessors; getters always return fresh copies ----
    @property
    def cricket_state(self):
        return _loads(self.cricket_data, None)

    @cricket_state.setter
    def cricket_state(self, value):
        self.cricket_data = json.dumps(value) if value is not None else None

    @property
    def current_set(self):
        return _loads(self.current_set_data, None)

    @current_set.setter
    def current_set(self, value):
        self.current_set_data = json.dumps(value) if value is not None else None

    @property
    def set_details(self):
        return _loads(self.set_details_data, [])

    @set_details.setter
    def set_details(self, value):
        self.set_details_data = json.dumps(value or [])

    @property
    def score_deltas(self):
        return _loads(self.score_deltas_data, {})

    @score_deltas.setter
    def score_deltas(self, value):
        self.score_deltas_data = json.dumps(value or {})

    def team_id_for(self, side):
        return self.team_a_id if side == 'A' else self.team_b_id

    def get_score(self, side):
        return self.score_a if side == 'A' else self.score_b

    def set_score(self, side, value):
        if side == 'A':
            self.score_a = value
        else:
            self.score_b = value

    @property
    def winner_side(self):
        if self.winner_id is None:
            return None
        if self.winner_id == self.team_a_id:
            return 'A'
        if self.winner_id == self.team_b_id:
            return 'B'
        return None

    def to_dict(self):
        from livescore.services.scoring import cricket, points, sets
        from livescore.services.scoring.rules import CRICKET, MAX_PERIODS

        payload = {
            'id': self.id,
            'sport': self.sport,
            'status': self.status,
            'team_a': self.team_a.to_dict() if self.team_a else {'id': self.team_a_id},
            'team_b': self.team_b.to_dict() if self.team_b else {'id': self.team_b_id},
            'score_a': self.score_a,
            'score_b': self.score_b,
            'winner': self.winner.to_dict() if self.winner else None,
            'winner_side': self.winner_side,
            'venue': self.venue,
            'scheduled_at': self.scheduled_at.isoformat() if self.scheduled_at else None,
            'toss': {'winner': self.toss_winner, 'decision': self.toss_decision} if self.toss_winner else None,
            'version': self.version_id,
        }
        if self.sport == CRICKET:
            payload['cricket'] = cricket.scorecard(self.cricket_state)
        elif self.sport in SET_SPORTS:
            payload.update(sets.summary(self))
        else:
            payload['period'] = self.period
            payload['max_periods'] = MAX_PERIODS.get(self.sport)
        payload['fouls'] = [f.to_dict() for f in self.fouls]
        payload['cards'] = points.card_tallies(self.fouls)
        return payload


class Foul(db.Model):
    __tablename__ = 'foul'
    id = db.Column(db.Integer, primary_key=True)
    match_id = db.Column(db.Integer, db.ForeignKey('match.id'), nullable=False, index=True)
    team = db.Column(db.String(1), nullable=False)  # 'A' or 'B'
    foul_type = db.Column(db.String(32), nullable=False)
    player_name = db.Column(db.String(128), nullable=False)
    jersey_number = db.Column(db.Integer, nullable=True)
    game_time = db.Column(db.Integer, nullable=True)
    reason = db.Column(db.String(256), nullable=True)
    created_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow)

    match = db.relationship('Match', back_populates='fouls')

    def to_dict(self):
        return {
            'id': self.id,
            'match_id': self.match_id,
            'team': self.team,
            'foul_type': self.foul_type,
            'player_name': self.player_name,
            'jersey_number': self.jersey_number,
            'game_time': self.game_time,
            'reason': self.reason,
            'timestamp': self.created_at.isoformat() if self.created_at else None,
        }
