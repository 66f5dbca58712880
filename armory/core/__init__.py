"""Armory Core — pure Python, DB independent"""
