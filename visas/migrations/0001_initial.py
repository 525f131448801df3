import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import visas.models.application_document


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='VisaApplication',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('surname', models.CharField(max_length=50, blank=True)),
                ('given_name', models.CharField(max_length=100, blank=True)),
                ('full_name', models.CharField(max_length=150, blank=True)),
                ('changed_name', models.BooleanField(null=True, blank=True)),
                ('changed_name_details', models.CharField(max_length=200, blank=True)),
                ('date_of_birth', models.DateField(null=True, blank=True)),
                ('gender', models.CharField(max_length=10, choices=[('male', 'Male'), ('female', 'Female'), ('other', 'Other')], blank=True)),
                ('place_of_birth', models.CharField(max_length=100, blank=True)),
                ('country_of_birth', models.CharField(max_length=100, blank=True)),
                ('citizenship_id', models.CharField(max_length=50, blank=True)),
                ('religion', models.CharField(max_length=50, blank=True)),
                ('visible_identification_marks', models.CharField(max_length=200, blank=True)),
                ('educational_qualification', models.CharField(max_length=50, blank=True)),
                ('nationality', models.CharField(max_length=100, blank=True)),
                ('nationality_by_birth', models.BooleanField(null=True, blank=True)),
                ('lived_in_applying_country_2_years', models.BooleanField(null=True, blank=True)),
                ('passport_number', models.CharField(max_length=20, blank=True)),
                ('passport_place_of_issue', models.CharField(max_length=100, blank=True)),
                ('passport_issue_date', models.DateField(null=True, blank=True)),
                ('passport_expiry_date', models.DateField(null=True, blank=True)),
                ('other_passport_held', models.BooleanField(null=True, blank=True)),
                ('other_passport_country', models.CharField(max_length=100, blank=True)),
                ('other_passport_number', models.CharField(max_length=20, blank=True)),
                ('other_passport_issue_date', models.DateField(null=True, blank=True)),
                ('other_passport_place_of_issue', models.CharField(max_length=100, blank=True)),
                ('other_passport_nationality', models.CharField(max_length=100, blank=True)),
                ('email', models.EmailField(max_length=255)),
                ('mobile_isd', models.CharField(max_length=10, blank=True)),
                ('mobile_number', models.CharField(max_length=15, blank=True)),
                ('present_address_house_street', models.CharField(max_length=200, blank=True)),
                ('present_address_village_town', models.CharField(max_length=100, blank=True)),
                ('present_address_state', models.CharField(max_length=100, blank=True)),
                ('present_address_postal_code', models.CharField(max_length=20, blank=True)),
                ('present_address_country', models.CharField(max_length=100, blank=True)),
                ('present_address_phone', models.CharField(max_length=20, blank=True)),
                ('permanent_address_same_as_present', models.BooleanField(null=True, blank=True)),
                ('permanent_address_house_street', models.CharField(max_length=200, blank=True)),
                ('permanent_address_village_town', models.CharField(max_length=100, blank=True)),
                ('permanent_address_state', models.CharField(max_length=100, blank=True)),
                ('residential_address', models.CharField(max_length=500, blank=True)),
                ('city', models.CharField(max_length=100, blank=True)),
                ('country', models.CharField(max_length=100, blank=True)),
                ('father_name', models.CharField(max_length=100, blank=True)),
                ('father_nationality', models.CharField(max_length=100, blank=True)),
                ('father_prev_nationality', models.CharField(max_length=100, blank=True)),
                ('father_place_of_birth', models.CharField(max_length=100, blank=True)),
                ('father_country_of_birth', models.CharField(max_length=100, blank=True)),
                ('mother_name', models.CharField(max_length=100, blank=True)),
                ('mother_nationality', models.CharField(max_length=100, blank=True)),
                ('mother_prev_nationality', models.CharField(max_length=100, blank=True)),
                ('mother_place_of_birth', models.CharField(max_length=100, blank=True)),
                ('mother_country_of_birth', models.CharField(max_length=100, blank=True)),
                ('marital_status', models.CharField(max_length=20, blank=True)),
                ('spouse_name', models.CharField(max_length=100, blank=True)),
                ('spouse_nationality', models.CharField(max_length=100, blank=True)),
                ('spouse_prev_nationality', models.CharField(max_length=100, blank=True)),
                ('spouse_place_of_birth', models.CharField(max_length=100, blank=True)),
                ('spouse_country_of_birth', models.CharField(max_length=100, blank=True)),
                ('pakistan_heritage', models.BooleanField(null=True, blank=True)),
                ('pakistan_heritage_details', models.CharField(max_length=500, blank=True)),
                ('visa_type', models.CharField(max_length=20, choices=[('tourist', 'Tourist'), ('business', 'Business'), ('medical', 'Medical'), ('conference', 'Conference'), ('student', 'Student'), ('other', 'Other')], blank=True)),
                ('visa_type_other', models.CharField(max_length=100, blank=True)),
                ('duration_of_stay', models.CharField(max_length=50, blank=True)),
                ('intended_arrival_date', models.DateField(null=True, blank=True)),
                ('arrival_point_id', models.UUIDField(null=True, blank=True)),
                ('expected_port_of_exit', models.CharField(max_length=100, blank=True)),
                ('purpose_of_visit', models.CharField(max_length=1000, blank=True)),
                ('places_to_visit_1', models.CharField(max_length=100, blank=True)),
                ('places_to_visit_2', models.CharField(max_length=100, blank=True)),
                ('hotel_booked_through_operator', models.BooleanField(null=True, blank=True)),
                ('hotel_name', models.CharField(max_length=200, blank=True)),
                ('hotel_address', models.CharField(max_length=500, blank=True)),
                ('visited_india_before', models.BooleanField(null=True, blank=True)),
                ('previous_india_address', models.CharField(max_length=500, blank=True)),
                ('previous_india_cities', models.CharField(max_length=200, blank=True)),
                ('previous_visa_number', models.CharField(max_length=50, blank=True)),
                ('previous_visa_type', models.CharField(max_length=50, blank=True)),
                ('previous_visa_place_of_issue', models.CharField(max_length=100, blank=True)),
                ('previous_visa_issue_date', models.DateField(null=True, blank=True)),
                ('permission_refused_before', models.BooleanField(null=True, blank=True)),
                ('permission_refused_details', models.CharField(max_length=500, blank=True)),
                ('indian_contact_address', models.CharField(max_length=500, blank=True)),
                ('indian_contact_person', models.CharField(max_length=100, blank=True)),
                ('indian_contact_phone', models.CharField(max_length=20, blank=True)),
                ('previous_visa_details', models.CharField(max_length=500, blank=True)),
                ('visa_refused_before', models.BooleanField(null=True, blank=True)),
                ('visa_refusal_details', models.CharField(max_length=500, blank=True)),
                ('countries_visited_last_10_years', models.JSONField(default=list, blank=True)),
                ('visited_saarc_countries', models.BooleanField(null=True, blank=True)),
                ('saarc_countries_details', models.CharField(max_length=500, blank=True)),
                ('reference_india_name', models.CharField(max_length=100, blank=True)),
                ('reference_india_address', models.CharField(max_length=500, blank=True)),
                ('reference_india_phone', models.CharField(max_length=20, blank=True)),
                ('reference_home_name', models.CharField(max_length=100, blank=True)),
                ('reference_home_address', models.CharField(max_length=500, blank=True)),
                ('reference_home_phone', models.CharField(max_length=20, blank=True)),
                ('security_arrested_convicted', models.BooleanField(null=True, blank=True)),
                ('security_arrested_details', models.CharField(max_length=500, blank=True)),
                ('security_refused_entry_deported', models.BooleanField(null=True, blank=True)),
                ('security_refused_entry_details', models.CharField(max_length=500, blank=True)),
                ('security_criminal_activities', models.BooleanField(null=True, blank=True)),
                ('security_criminal_details', models.CharField(max_length=500, blank=True)),
                ('security_terrorist_activities', models.BooleanField(null=True, blank=True)),
                ('security_terrorist_details', models.CharField(max_length=500, blank=True)),
                ('security_terrorist_views', models.BooleanField(null=True, blank=True)),
                ('security_terrorist_views_details', models.CharField(max_length=500, blank=True)),
                ('security_asylum_sought', models.BooleanField(null=True, blank=True)),
                ('security_asylum_details', models.CharField(max_length=500, blank=True)),
                ('declaration_accepted', models.BooleanField(default=False)),
                ('status', models.CharField(choices=[('draft', 'Draft'), ('submitted', 'Submitted'), ('under_review', 'Under Review'), ('approved', 'Approved'), ('completed', 'Completed'), ('rejected', 'Rejected')], db_index=True, default='draft', max_length=20)),
                ('is_locked', models.BooleanField(default=False)),
                ('is_paid', models.BooleanField(default=False)),
                ('admin_notes', models.TextField(blank=True)),
                ('last_autosave_at', models.DateTimeField(blank=True, null=True)),
                ('submitted_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='visa_applications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'visas_application',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='ApplicationDocument',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('document_type', models.CharField(choices=[('photo', 'Photo'), ('passport', 'Passport Scan'), ('business_card', 'Business Card'), ('invitation_letter', 'Invitation Letter'), ('hospital_letter', 'Hospital Letter'), ('conference_docs', 'Conference Documents'), ('other', 'Other')], max_length=30)),
                ('file', models.FileField(upload_to=visas.models.application_document.document_upload_path)),
                ('file_name', models.CharField(max_length=255)),
                ('mime_type', models.CharField(blank=True, max_length=100)),
                ('file_size', models.PositiveIntegerField(default=0)),
                ('uploaded_at', models.DateTimeField(auto_now_add=True)),
                ('application', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='documents', to='visas.visaapplication')),
            ],
            options={
                'db_table': 'visas_application_document',
                'ordering': ['uploaded_at'],
            },
        ),
    ]
