"""Polleria back-office: WhatsApp order intake API"""
