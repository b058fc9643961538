"""
Flask REST API for CalDB
Exposes evaluation, formatting and calculation history as JSON endpoints
"""
import math

from flask import Flask, jsonify, request
from flask_cors import CORS

import config
from calculator import Calculator, CalculatorError, evaluate_expression, preview_expression
from database import Database, HistoryStoreError
from formatter import format_number_for_display
from history_manager import HistoryManager, expression_from_entry, result_from_entry


def _expression_arg():
    payload = request.get_json(silent=True) or {}
    expression = payload.get('expression')
    if not isinstance(expression, str):
        raise CalculatorError("'expression' must be a string")
    return expression


def _error(message, status):
    return jsonify({'success': False, 'error': message}), status


def create_app(db=None, max_items=config.MAX_HISTORY_ITEMS):
    """Build the API app around a history database"""
    app = Flask(__name__)
    CORS(app)  # Enable CORS for all routes

    if db is None:
        db = Database()
    history_manager = HistoryManager(db, max_items=max_items)
    app.config['HISTORY_MANAGER'] = history_manager

    @app.route('/api')
    def api_info():
        """List the available endpoints"""
        return jsonify({
            'success': True,
            'data': {
                'name': config.APP_NAME,
                'version': config.VERSION,
                'endpoints': {
                    '/api/evaluate': 'POST {expression} - evaluate an expression',
                    '/api/format': 'POST {value} - format a number for display',
                    '/api/preview': 'POST {expression} - live result while typing',
                    '/api/calculate': 'POST {expression} - commit and save to history',
                    '/api/history': 'GET list / DELETE clear calculation history',
                },
            }
        })

    @app.route('/api/evaluate', methods=['POST'])
    def evaluate():
        """Evaluate an expression and format the result"""
        try:
            expression = _expression_arg()
            value = evaluate_expression(expression)
        except CalculatorError as e:
            return _error(str(e), 400)

        finite = not (math.isnan(value) or math.isinf(value))
        return jsonify({
            'success': True,
            'data': {
                'expression': expression,
                'value': value if finite else None,
                'formatted': format_number_for_display(value),
            }
        })

    @app.route('/api/format', methods=['POST'])
    def format_value():
        """Format a number the way the display shows it"""
        payload = request.get_json(silent=True) or {}
        try:
            value = float(payload['value'])
        except (KeyError, TypeError, ValueError):
            return _error("'value' must be a number", 400)

        return jsonify({
            'success': True,
            'data': {'formatted': format_number_for_display(value)}
        })

    @app.route('/api/preview', methods=['POST'])
    def preview():
        """Running total for a partially typed expression"""
        try:
            expression = _expression_arg()
        except CalculatorError as e:
            return _error(str(e), 400)

        return jsonify({
            'success': True,
            'data': {'preview': preview_expression(expression)}
        })

    @app.route('/api/calculate', methods=['POST'])
    def calculate():
        """Commit an expression; complete operations are saved to history"""
        try:
            expression = _expression_arg()
        except CalculatorError as e:
            return _error(str(e), 400)

        calc = Calculator(history=history_manager)
        calc.set_expression(expression)
        try:
            result = calc.calculate()
        except HistoryStoreError as e:
            return _error(str(e), 500)

        return jsonify({
            'success': True,
            'data': {
                'expression': expression,
                'result': result if result is not None else calc.get_expression(),
            }
        })

    @app.route('/api/history', methods=['GET'])
    def get_history():
        """Get calculation history, newest first"""
        try:
            entries = history_manager.list_all()
            count = history_manager.count()
        except HistoryStoreError as e:
            return _error(str(e), 500)

        # Split form, for reloading an expression into the editor
        items = [
            {'expression': expression_from_entry(entry), 'result': result_from_entry(entry)}
            for entry in entries
        ]
        return jsonify({
            'success': True,
            'data': entries,
            'items': items,
            'count': count
        })

    @app.route('/api/history', methods=['DELETE'])
    def clear_history():
        """Clear calculation history"""
        try:
            history_manager.clear()
        except HistoryStoreError as e:
            return _error(str(e), 500)

        return jsonify({'success': True, 'data': [], 'items': [], 'count': 0})

    return app
